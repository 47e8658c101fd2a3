"""
Contract test fixtures.

Contract tests pin the response shapes that the gateway, the paystub and
report generators and the frontend read. They reuse the per-service clients
from tests/conftest.py; no additional fixtures are needed here.
"""
