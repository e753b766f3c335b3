"""Pipeline wiring: stage protocols, actions and the dispatcher."""
