"""Mock HTTP server for client integration tests.

Serves canned GET responses from a JSON route table and mirrors requests on
``POST /echo``, over a plain HTTP port and a TLS port at the same time.
"""

__version__ = "1.0.0"
