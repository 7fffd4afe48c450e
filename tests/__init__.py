"""Transit scan test-suite."""
