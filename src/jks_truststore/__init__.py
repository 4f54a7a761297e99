"""
jks_truststore — Java KeyStore trust stores from PEM certificate chains.

Decodes PEM chains, assembles one trusted-certificate entry per chain,
serializes them into a password-protected JKS byte stream and exposes the
result as a base64 blob with a content-derived identifier.

Built on the Railway-Oriented Programming (ROP) framework for
explicit, composable, functional error handling.
"""

__version__ = "0.1.0"
