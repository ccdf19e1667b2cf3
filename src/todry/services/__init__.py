"""Services module for Todry - Business logic layer.

- identity_service: signup, login and the session pointer
- undo_service: the single-slot undo buffer and on-screen notices
- backup_service: export and import of backups
- feedback_service: fire-and-forget cues for the front end
- session_service: wires the above together around a logged-in user
"""
