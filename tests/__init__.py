"""
Test suite for the Clinic Management API.

Contains unit tests for the policy engine, subject resolver and slot
calculator, and HTTP-level tests for every router.
"""
import os

# Set environment for testing
os.environ["TESTING"] = "1"
