"""Domain layer: models, rules and errors"""
