"""HTTP primitives — Request, Response, Redirect, Headers, QueryParams."""
