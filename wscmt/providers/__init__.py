"""Provider drivers for commit message generation."""
