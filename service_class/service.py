
class Service(object):
    r"""
    Class representing an SFC demand
        \param description          String description of the demand
        \param vnfs                 List of vnf descriptions, one per section, in chain order
        \param bandwidth            Float bandwidth of the demand
        \param availability         Float required end-to-end availability, in (0, 1)
        \param latency              Float maximum latency of the demand
        \param source               String description of the node where the demand starts
        \param sink                 String description of the node where the demand ends
    """
    def __init__(self, description: str = None, vnfs: list = None, bandwidth: float = 1, availability: float = 0.99,
                 latency: float = None, source: str = None, sink: str = None, id: int = None):
        if not 0 < availability < 1:
            raise ValueError("Required availability of service {} must be in (0, 1), got {}.".format(description, availability))
        self.id = id
        self.description = description
        self.vnfs = vnfs if vnfs is not None else []
        self.bandwidth = bandwidth
        self.availability = availability
        self.latency = latency
        self.source = source
        self.sink = sink

    def get_vnfs(self, vnfs):
        """
        Given a list of VNFs, returns the list of VNFs used by each section of the service.
        """
        to_return = []
        for v in self.vnfs:
            for vnf in vnfs:
                if vnf.description == v:
                    to_return.append(vnf)
                    break
            else:
                raise ValueError("VNF {} required by service {} does not exist.".format(v, self.description))
        return to_return

    def to_json(self) -> dict:
        """
        Returns a json dictionary describing the service.
        """
        to_return = {}
        to_return["id"] = self.id
        to_return["name"] = self.description
        to_return["vnfs"] = self.vnfs
        to_return["bandwidth"] = self.bandwidth
        to_return["availability"] = self.availability
        to_return["latency"] = self.latency
        to_return["source"] = self.source
        to_return["sink"] = self.sink
        return to_return

    def load_from_dict(self, data: dict):
        """
        Given a json dictionary, loads the attributes.
        """
        if not 0 < data["availability"] < 1:
            raise ValueError("Required availability of service {} must be in (0, 1).".format(data["name"]))
        self.id = data.get("id")
        self.description = data["name"]
        self.vnfs = data["vnfs"]
        self.bandwidth = data["bandwidth"]
        self.availability = data["availability"]
        self.latency = data.get("latency")
        self.source = data.get("source")
        self.sink = data.get("sink")
