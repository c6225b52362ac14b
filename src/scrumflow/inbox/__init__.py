"""ScrumFlow inbox - the notification feed in a terminal."""
