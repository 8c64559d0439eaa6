"""Domain layer - query options, compiled queries and the pure services
that turn one into the other."""
