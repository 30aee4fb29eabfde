"""HTTP primitives — request context, headers, query parameters, responses."""
