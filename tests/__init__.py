"""Test-suite for dockomatic."""
