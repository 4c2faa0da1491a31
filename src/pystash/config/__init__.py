"""PyStash configuration: properties and provider detection."""
