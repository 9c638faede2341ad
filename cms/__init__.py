"""cms — the site's public content store (countries, blogs, routing)."""
