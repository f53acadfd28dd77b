"""Domain layer: account aggregate, validation rules and workflows."""
