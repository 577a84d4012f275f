"""Dataset registry, key storage and discovery for census-query."""
