"""HTTP interface for ContactPro."""
