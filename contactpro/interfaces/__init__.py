"""Interactive front ends for ContactPro."""
