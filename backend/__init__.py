"""Trial Issue Tracker HTTP backend."""
