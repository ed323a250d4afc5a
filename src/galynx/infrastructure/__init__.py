"""Infrastructure layer: storage and remote API access"""
