# Carrier integration services: token cache, payload mapping, error classification, rating client
