"""Static configuration: widget registry mapping and endpoint YAML."""
