"""
Tenant Operator — gives every Tenant custom resource its own namespace.

Importing the package does not register kopf handlers; those live in
tenant_operator.handlers and are loaded by `kopf run`.
"""

__version__ = "1.0.0"
