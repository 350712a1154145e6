"""Git access: repository port and topology classification."""
