from topology.location import Location

class Link(object):
    """
    Class representing an arc (link) between two locations of the substrate network
    -------------------
    Params:
        source:             topology.location.Location
                                location object of tail node.
        sink:               topology.location.Location
                                location object of head node.
        bandwidth:          float
                                bandwidth of link.
        delay:              float
                                delay of link.
    """

    def __init__(self, source: Location = None, sink: Location = None, bandwidth: float = 1e6, delay: float = 0):
        self.source = source
        self.sink = sink
        self.bandwidth = bandwidth
        self.delay = delay

    def __str__(self) -> str:
        """
        string representation of link
        """
        return "Link {} ({}) -> {} ({})".format(self.source.description, self.source.id, self.sink.description, self.sink.id)

    def to_json(self) -> dict:
        """
        returns the link as a dictionary for use with json
        """
        return {"source": self.source.id, "sink": self.sink.id, "bandwidth": self.bandwidth, "delay": self.delay}
