# External payment and telecom providers
