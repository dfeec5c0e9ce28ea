"""HTTP clients, the wallet abstraction and swap execution for Base."""
