"""Fleet domain - B2B fleet lead capture"""
