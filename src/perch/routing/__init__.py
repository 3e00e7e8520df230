"""Path patterns, ordered routers, and handler chains.

Paths compile to matchers at registration time; routers keep routes and
mounts in registration order; chains run a route's handlers one after
the other until one of them decides the outcome.
"""
