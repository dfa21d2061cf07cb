"""Browser-based terminal for IrisOS, served with Flask."""
