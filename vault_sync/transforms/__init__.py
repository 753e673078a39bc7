"""Text transforms applied to note bodies and frontmatter."""
