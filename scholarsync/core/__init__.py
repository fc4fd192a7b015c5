"""Infrastructure: model clients, research store and their factories."""
