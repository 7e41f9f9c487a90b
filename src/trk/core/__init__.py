"""Collaborators around the timesheet: storage, git, reports."""
