"""Terminal front-end for the joker table."""
