"""NoteCode API: authenticated storage for user-owned code snippets."""
