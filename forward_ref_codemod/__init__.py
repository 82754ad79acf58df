"""Rewrite React.forwardRef components to accept ref as a regular prop."""
