"""Ad products, ad settings and header bidding order provisioning."""
