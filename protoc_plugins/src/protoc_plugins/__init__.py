"""Resolution of protoc plugin declarations into executables protoc can invoke."""
