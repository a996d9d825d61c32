"""Identity: users, roles, passwords, tokens and access control."""
