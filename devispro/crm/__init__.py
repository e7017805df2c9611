"""Clients, projects and the issuing company profile."""
