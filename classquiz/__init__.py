"""Mock persistence layer for the classroom quiz application."""
