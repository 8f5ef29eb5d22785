"""Authentication - register, login, token refresh and logout."""
