"""pricefeed: polls a quote source for one symbol and stores the latest price."""
