"""External data adapters. Each returns demo or empty data instead of raising."""
