"""
Application services.

Each service wraps one area of the domain and is bound to the repositories
of a single request session; see :mod:`docuvault.server.services.deps` for
how the API obtains them.
"""
