"""ai_blog — LLM-driven blog pipeline: plan → topics → article → publish."""
