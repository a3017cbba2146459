CUSTOMER = "customer"
STAFF = "staff"  # back-office user without admin rights
ADMIN = "admin"
