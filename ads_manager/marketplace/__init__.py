"""Ad products sold through the site's store."""
