"""
Permission management feature module.

Implements role-based access control: a closed permission catalog, roles
bundling permissions, and a gate that authorizes actions on resources with
a superadmin bypass and owner-scoped permissions.
"""
