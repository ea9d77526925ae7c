from topology.network import Network
from service_class.vnf import VNF
from service_class.service import Service
from optimisation.availability import placement_cost
import json

class Instance(object):
    """
    Class representing a placement instance: the substrate network, the catalogue of VNFs and the SFC demands.
    -------------------
    Params:
        network:            topology.network.Network
                                substrate network whose nodes host the VNFs.
        vnfs:               list[service_class.vnf.VNF]
                                catalogue of VNFs, indexed by position.
        services:           list[service_class.service.Service]
                                SFC demands, indexed by position.

    The instance is read-only once built. Node availability rank, rank positions and the VNF index of every section are
    computed at construction.
    """
    def __init__(self, network: Network = None, vnfs: list = None, services: list = None):
        self.network = network if network is not None else Network()
        self.vnfs = vnfs if vnfs is not None else []
        self.services = services if services is not None else []
        self.setup()

    def setup(self):
        """
        computes the node rank and section indexes.
        """
        self.nodes = self.network.nodes
        self.rank = self.network.get_availability_rank()
        self.rank_positions = self.network.get_rank_positions()
        self.ranked_availabilities = [self.nodes[v].availability for v in self.rank]
        vnf_index = {f.description: index for index, f in enumerate(self.vnfs)}
        self.section_vnfs = []
        for service in self.services:
            # Raises a ValueError if a demand uses an unknown VNF.
            service.get_vnfs(self.vnfs)
            for end in [service.source, service.sink]:
                if end is not None and self.network.get_location_by_description(end) is None:
                    raise ValueError("End point {} of service {} is not a node of the network.".format(end, service.description))
            self.section_vnfs.append([vnf_index[f] for f in service.vnfs])
        self.keys = None

    @property
    def nb_nodes(self) -> int:
        return len(self.nodes)

    @property
    def nb_vnfs(self) -> int:
        return len(self.vnfs)

    @property
    def nb_demands(self) -> int:
        return len(self.services)

    def nb_sections(self, k: int) -> int:
        return len(self.services[k].vnfs)

    def get_section_vnf(self, k: int, i: int) -> int:
        """
        returns the index of the vnf used by section i of demand k.
        """
        return self.section_vnfs[k][i]

    def get_required_capacity(self, k: int, i: int) -> float:
        """
        returns the capacity consumed on a node by section i of demand k.
        """
        return self.services[k].bandwidth * self.vnfs[self.section_vnfs[k][i]].consumption

    def get_placement_cost(self, v: int, f: int) -> float:
        return placement_cost(self.nodes[v], self.vnfs[f])

    def get_variable_keys(self) -> list:
        """
        Returns the keys of every decision variable, placement variables ("y", v, f) first and then assignment variables
        ("x", k, i, v).
        """
        if self.keys is None:
            keys = [("y", v, f) for v in range(self.nb_nodes) for f in range(self.nb_vnfs)]
            for k in range(self.nb_demands):
                for i in range(self.nb_sections(k)):
                    keys += [("x", k, i, v) for v in range(self.nb_nodes)]
            self.keys = keys
        return self.keys

    def to_json(self) -> dict:
        """
        Returns a json dictionary describing the instance.
        """
        return {"network": self.network.to_json(), "vnfs": [f.to_json() for f in self.vnfs], "sfcs": [s.to_json() for s in self.services]}

    def save_as_json(self, filename = None):
        """
        saves the instance as a JSON to filename.json
        """
        to_dump = self.to_json()
        if filename is not None:
            if filename[-5:] != ".json":
                filename = filename + ".json"
        else:
            filename = self.network.description + ".json"

        with open(filename, 'w') as fp:
            json.dump(to_dump, fp, indent=4, separators=(", ", ": "))

    def load_from_dict(self, data: dict):
        """
        Given a json dictionary, loads the network, vnfs and sfcs.
        """
        assert list(data.keys()) == ["network", "vnfs", "sfcs"], "Keys in JSON don't match expected input for type instance."
        self.network = Network()
        self.network.load_from_dict(data["network"])
        self.vnfs = []
        for f in data["vnfs"]:
            vnf = VNF()
            vnf.load_from_dict(f)
            self.vnfs.append(vnf)
        self.services = []
        for s in data["sfcs"]:
            service = Service()
            service.load_from_dict(s)
            self.services.append(service)
        self.setup()

    def load_from_json(self, filename: str):
        """
        Given a json file, it loads the data and stores as instance of Instance.
        """
        if filename[-5:] != ".json":
            filename = filename + ".json"

        with open(filename) as f:
            data = json.load(f)
        self.load_from_dict(data)
