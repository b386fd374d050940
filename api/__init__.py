"""HTTP layer over the docket compliance engine."""
