"""Infrastructure: persistence and external service implementations of application ports."""
