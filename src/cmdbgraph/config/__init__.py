"""Configuration layer — pydantic section models, settings and logging."""
