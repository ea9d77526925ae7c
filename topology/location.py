import itertools

class Location(object):
    id_iter = itertools.count()
    """
    Represents a location in the substrate network.
    -------------------
    Params:
        id:                 int
                                unique identifier for location.
        description:        str
                                description of location.
        type:               str
                                type of location, "Node" for locations able to host VNFs.
    """
    def __init__(self, description: str = None, type: str = None, id: int = None):
        self.id = next(Location.id_iter) if id is None else id
        self.description = description
        self.type = type

    def __str__(self) -> str:
        """
        prints string representation of location
        """
        return "Location: {}, Description: {}".format(self.id, self.description)

    def to_json(self) -> dict:
        """
        return a dictionary for use with json.
        """
        return {"id": self.id, "description": self.description, "type": self.type}

class Node(Location):
    """
    Represents a node able to host VNFs.
    -------------------
    Params:
        capacity:           float
                                processing capacity of node (bandwidth x consumption it can treat).
        availability:       float
                                probability that the node is up, in (0, 1).
        cost:               float
                                installation cost factor of node.
    """
    def __init__(self, description: str = None, capacity: float = float(1), availability: float = 0.99, cost: float = float(1), id: int = None):
        super().__init__(description, type = "Node", id = id)
        if not 0 < availability < 1:
            raise ValueError("Availability of node {} must be in (0, 1), got {}.".format(description, availability))
        if capacity < 0:
            raise ValueError("Capacity of node {} must be non-negative, got {}.".format(description, capacity))
        self.capacity = capacity
        self.availability = availability
        self.cost = cost

    def to_json(self) -> dict:
        """
        return a dictionary for use with json.
        """
        return {"id": self.id, "description": self.description, "type": self.type, "capacity": self.capacity,
                "availability": self.availability, "cost": self.cost}

    def load_from_dict(self, dictionary):
        """
        Given a json dictionary, loads the attributes.
        """
        if not 0 < dictionary["availability"] < 1:
            raise ValueError("Availability of node {} must be in (0, 1).".format(dictionary["description"]))
        if dictionary["capacity"] < 0:
            raise ValueError("Capacity of node {} must be non-negative.".format(dictionary["description"]))
        self.id, self.description, self.type = dictionary["id"], dictionary["description"], dictionary["type"]
        self.capacity, self.availability, self.cost = dictionary["capacity"], dictionary["availability"], dictionary["cost"]

