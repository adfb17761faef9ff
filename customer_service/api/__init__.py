# This file marks the API package that exposes the customer service over HTTP.
# It exists so routers, services, and schemas share one import namespace.
