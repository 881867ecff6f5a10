"""Taskboard — personal task management API.

Users sign up, log in and manage their own tasks. Admins see every
task and manage user accounts. Authentication is JWT based (access +
refresh tokens in http-only cookies or a Bearer header).
"""

__version__ = "0.1.0"
