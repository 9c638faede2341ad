"""ai_blog.services — pipeline stages and their external collaborators."""
