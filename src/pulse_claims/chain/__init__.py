"""Chain access: contract ABIs and the async RPC client."""
