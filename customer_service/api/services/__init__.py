# This file marks the services package for data-access controllers.
# It exists so routers can depend on contract implementations instead of raw SQL.
# Controllers here translate contract operations into stored-procedure calls.
