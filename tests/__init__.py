"""
Student Registry Test Suite

Tests for:
- Student payload validation
- Student endpoints and the response envelope
- User creation and password hashing
- Soft-delete filtering in the repositories
- Error classification and failure modes
"""
