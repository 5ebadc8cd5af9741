"""Client for the headless GraphQL API of content fragment models."""
