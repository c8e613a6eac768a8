from config.BluePrint import PARAMS, ADDRESSES, TX_OPTIONS


class BluePrint:
    def __init__(self, blueprint):
        if blueprint not in PARAMS:
            raise KeyError(
                f"Unknown blueprint `{blueprint}`. Available: {', '.join(sorted(PARAMS.keys()))}")
        self.blueprint = blueprint
        self.PARAMS = PARAMS[blueprint]
        self.ADDRESSES = ADDRESSES[blueprint]
        self.TX_OPTIONS = TX_OPTIONS[blueprint]

    def __repr__(self):
        return f"BluePrint({self.blueprint!r})"


class DeployArgs:
    def __init__(self, sender, chain, blueprint, rpc, w3):
        self.sender = sender
        self.chain = chain
        self.blueprint = BluePrint(blueprint)
        self.rpc = rpc
        self.w3 = w3

    def __repr__(self):
        return (
            f"DeployArgs(sender={self.sender.address}, chain={self.chain}, "
            f"blueprint={self.blueprint.blueprint}, rpc={self.rpc})"
        )
