"""Authentication and authorization.

Learn: Two layers, applied in this order on every tenant-scoped route:
1. Session auth — httpOnly cookie → server-side session row → CurrentUser
2. Tenant guard — tenant id from the path → membership row → role check

Both hand their result to handlers as explicit values (CurrentUser,
TenantContext); nothing is stashed on globals.
"""
