"""Authentication collaborator: bearer tokens, principals and role checks."""
