# Core: configuration, error hierarchy, shared helpers
