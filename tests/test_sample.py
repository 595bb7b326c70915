"""
Tests for the example module quoted by the guide.
"""

from backend.pkgguide.sample import add_numbers, hello_world


class TestAddNumbers:
    """Tests for add_numbers."""

    def test_one_plus_one(self):
        assert add_numbers(1, 1) == 2

    def test_one_plus_minus_one(self):
        assert add_numbers(1, -1) == 0

    def test_floats(self):
        assert add_numbers(0.5, 0.25) == 0.75


class TestHelloWorld:
    """Tests for hello_world."""

    def test_default_greeting(self):
        assert hello_world() == "Hello, World!"

    def test_named_greeting(self):
        assert hello_world("Ada") == "Hello, Ada!"

    def test_empty_name_falls_back(self):
        assert hello_world("") == "Hello, World!"
